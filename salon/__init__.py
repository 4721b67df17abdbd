"""Salon booking backend - availability and booking engine behind a FastAPI API"""
