# -*- coding: utf-8 -*-
"""AI suggestion gateway (Gemini)."""
