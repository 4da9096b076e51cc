"""Utility modules for sharespider.

Modules:
    console: Rich console output
    helpers: General helper functions
    logging: Logging facade over the console
"""
