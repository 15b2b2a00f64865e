# Services package init
"""
Inkpost Backend: Services Layer
=================================

Service Inventory:
    - AuthService: registration, login (token issue), profile
    - PostService: post CRUD with the ownership rule and cover lifecycle
    - AssetStorage / LocalAssetStorage: cover image files on disk
    - ownership: the "only the author may mutate" decision

Services receive their collaborators at construction (see app/dependencies.py)
and can be unit-tested with mocks, without HTTP or a database.
"""
