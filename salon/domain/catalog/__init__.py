"""Catalog Domain - salon services (name, duration, price) as reference data"""
