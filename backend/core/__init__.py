"""
Core Django project package.
Holds settings and the root URL configuration.
"""
