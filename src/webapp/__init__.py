"""
Valhalla administration console (Flask web application).
"""
