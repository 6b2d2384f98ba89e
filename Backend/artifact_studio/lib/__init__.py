# artifact_studio/lib/__init__.py
