"""
Settings package for the Focus Nudge license service.

DJANGO_SETTINGS_MODULE selects one of dev, test or prod; each extends
base.py. Logging is built by logging.get_logging_config.
"""
