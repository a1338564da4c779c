# -*- coding: utf-8 -*-
"""FitFusion backend: diet plans, cart/orders, catalog and AI suggestions."""
