# -*- coding: utf-8 -*-
"""Token verification for requests authenticated by the external auth service."""
