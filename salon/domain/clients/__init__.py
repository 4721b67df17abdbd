"""Clients Domain - contact records deduplicated by email"""
