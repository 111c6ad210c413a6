"""
Settings package for the donation server.
Select one with DJANGO_SETTINGS_MODULE: base/development/production/testing.
"""
