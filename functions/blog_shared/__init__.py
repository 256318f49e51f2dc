"""
Types and helpers shared by the posts service and its clients.
"""
