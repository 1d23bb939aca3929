"""
API package containing the HTTP routes.

``router`` mounts the product routes under ``/api``; the liveness
route lives at the root of the application and is exported as
``root_router``.
"""
