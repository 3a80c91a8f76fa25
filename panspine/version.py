#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PanSpine v0.1.0

Version information.

Author: PanSpine Development Team
License: MIT License - See LICENSE
"""

__version__ = "0.1.0"

# PanSpine v0.1.0
# Any usage is subject to this software's license.
