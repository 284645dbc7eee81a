# -- kpm -------------------------------------------------------- #
# kpm/__main__.py on kpm                                          #
# Made by DiamondGotCat, Licensed under MIT License               #
# Copyright (c) 2025 DiamondGotCat                                #
# ---------------------------------------------- DiamondGotCat -- #

from .cli import main

if __name__ == "__main__":
    raise SystemExit(main())
