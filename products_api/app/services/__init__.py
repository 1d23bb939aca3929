"""
Service layer.

Each service encapsulates the business logic for a resource and
receives the document store handle it works on from the application
factory.
"""
