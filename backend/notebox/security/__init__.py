"""
Notebox Backend — Security Primitives
=====================================

What:  Pure-computation building blocks of the authentication core.
       - passwords.CredentialHasher: salted Argon2id hashing and verification
       - tokens.SessionTokenCodec:   signed, time-bound session tokens
Neither module performs I/O.
"""
