# -*- coding: utf-8 -*-
"""Product catalog: products, reviews and supplier inventory."""
