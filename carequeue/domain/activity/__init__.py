"""Activity log domain"""
