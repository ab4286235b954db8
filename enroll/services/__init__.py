"""
Service layer for enroll: extraction, retrying and the registration flow.
"""
