"""users/ -- User management rules layered on auth.store.UserStore.

Layer rule: users/ may import from auth/ and core/. It does NOT import from
api/. Route handlers in api/ call UserService and map the result to
response models.
"""
