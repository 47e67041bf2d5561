# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Command line programs.
"""
