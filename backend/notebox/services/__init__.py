"""
Notebox Backend — Services Layer
================================

Service Inventory:
    - LoginService (auth_service.py): login with implicit registration, token issuance
    - NoteService  (note_service.py): owner-scoped note listing and creation

Services receive their store collaborators per call and the verified identity
as an explicit argument; they never read identity from request data.
"""
