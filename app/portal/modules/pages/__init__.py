"""
Content pages: admin-authored HTML served publicly at /<slug> once published.
"""
