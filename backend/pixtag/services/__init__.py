# Services package init
"""
PixTag Backend — Services Layer
================================

What:  Business rules between the routes (HTTP) and the store (persistence).

Service Inventory:
    - FileService:        upload validation, file naming, writes and removals
    - ImageService:       upload / list / delete workflows for images
    - AnnotationService:  attach a label by name, detach a label by id
    - validators:         shared id checks

Each service takes an AnnotationStore per call and owns the transaction
boundary of the operation it implements.
"""
