"""Bookings Domain - public booking flow and the back office calendar"""
