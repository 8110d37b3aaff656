"""
Domain layer: catalog models, naming rules, results and errors.
"""
