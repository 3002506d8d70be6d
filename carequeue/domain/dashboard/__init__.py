"""Dashboard domain: read-only daily figures"""
