# catalog/services/__init__.py
