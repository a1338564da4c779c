# -*- coding: utf-8 -*-
"""Cart and order lifecycle."""
