"""
enroll - one-shot license server registration against a remote account service.
"""
