"""
Notebox Backend — API Routes Package
====================================

Route Inventory:
    - auth.py:    POST /api/auth/login      (unprotected; login or first-login registration)
                  GET  /api/auth/logout     (protected; clears the session cookie)
    - notes.py:   GET  /api/notes           (protected; list own notes, optional ?from=)
                  POST /api/notes           (protected; create a note)
    - health.py:  GET  /health              (unprotected; database ping)

Routes stay thin: they pull inputs from the request, hand the verified
identity to a service, and shape the HTTP response.
"""
