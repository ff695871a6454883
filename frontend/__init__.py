# frontend/__init__.py
