"""Staff registry domain"""
