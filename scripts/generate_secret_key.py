#!/usr/bin/env python3
"""
Generate session-secret material for the MedBook API.
Run this and copy the output to your .env file (required when APP_ENV=production).
"""

import secrets

if __name__ == "__main__":
    print("=" * 60)
    print("MedBook JWT Secret Generator")
    print("=" * 60)
    print("\nGenerating a secure random key...\n")

    secret_key = secrets.token_hex(32)

    print("APP_ENV=production")
    print(f"JWT_SECRET_KEY={secret_key}")
    print("\n" + "=" * 60)
    print("Copy the lines above to your .env, then set DB_URI and FRONTEND_URL")
    print("=" * 60)
