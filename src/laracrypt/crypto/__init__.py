"""Cryptographic building blocks: keys, cipher registry, AES and MAC."""
