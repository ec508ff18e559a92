# accounts/__init__.py
"""
Accounts app - Authentication and multi-tenancy.

This app provides:
- Company: Tenant/organization model
- User: Custom user model with active_company
- CompanyMembership: User-Company relationship
- AccessPermission: Fine-grained permissions
- ActorContext: Authorization context utilities

Every report is scoped to the actor's active company.
"""
