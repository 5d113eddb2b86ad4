"""
PDF Translation Package

Text extraction, chunked translation, layout reflow and PDF rendering.
"""
