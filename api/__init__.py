"""
HTTP API for the license service (Django REST framework).
"""
