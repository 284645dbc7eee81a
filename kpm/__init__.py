# -- kpm -------------------------------------------------------- #
# kpm/__init__.py on kpm                                          #
# Made by DiamondGotCat, Licensed under MIT License               #
# Copyright (c) 2025 DiamondGotCat                                #
# ---------------------------------------------- DiamondGotCat -- #

"""kpm - KISS package manager (CLI & Library)."""

from .config import KpmContext
from .errors import KpmError
from .manager import KpmManager, OperationResult

__version__ = "0.1.0"

__all__ = ["KpmContext", "KpmError", "KpmManager", "OperationResult", "__version__"]
