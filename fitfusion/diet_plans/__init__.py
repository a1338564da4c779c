# -*- coding: utf-8 -*-
"""Diet plans and their meal-time line items."""
