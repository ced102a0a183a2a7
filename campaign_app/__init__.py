"""
Contact-loader extensions for the texting campaign platform.
"""
