"""
Example host application for request_stats.
"""
