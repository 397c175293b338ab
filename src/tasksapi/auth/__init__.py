"""Authentication and authorization.

Learn: One authentication path: email/password → signed session token
(JWT, 1h). The token reaches us through one of two carriers, an httpOnly
cookie or an Authorization: Bearer header; both resolve to the same
CurrentIdentity that every protected route receives.
"""
