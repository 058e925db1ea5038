"""users/ -- User CRUD service over the credential store.

Layer rule: users/ imports from auth/ and core/, never from api/.
"""
