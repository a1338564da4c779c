# -*- coding: utf-8 -*-
"""Canonical food table shared by diet plans."""
