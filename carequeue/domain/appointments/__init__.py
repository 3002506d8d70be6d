"""Appointments domain: booking, waiting queue and the assignment engine"""
