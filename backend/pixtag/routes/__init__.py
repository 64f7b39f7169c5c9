# Routes package init
"""
PixTag Backend — API Routes Package
====================================

Route Inventory:
    - images.py:       POST   /api/images             (upload an image)
                       GET    /api/images             (list images with labels)
                       DELETE /api/images/{id}        (delete image, file, labels)
    - annotations.py:  POST   /api/annotations        (attach label by name)
                       DELETE /api/annotations        (detach label by id)
    - files.py:        GET    /api/files/{filename}   (serve a stored image)
    - health.py:       GET    /health                 (service health check)

Routes stay thin: pull data out of the request, call a service, return
its result. Business rules live in pixtag.services.
"""
