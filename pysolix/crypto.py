# pySolix - Password Encryption
# -*- coding: utf-8 -*-
"""
 Encrypted login support for the Anker Solix cloud

 The login endpoint expects the password encrypted with a key derived from an
 ECDH exchange (P-256) between a per-process key pair and the fixed server key:

    key        = raw 32 byte shared secret (AES-256)
    iv         = first 16 bytes of the shared secret
    cipher     = AES-CBC with PKCS#7 padding
    output     = standard base64

 The key/iv reuse is what the server implements, so it is reproduced as is.
"""
import base64
import logging

from cryptography.hazmat.primitives import padding, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

log = logging.getLogger(__name__)

SERVER_PUBLIC_KEY = ("04c5c00c4f8d1197cc7c3167c52bf7acb054d722f0ef08dcd7e0883236e0d72a38"
                     "68d9750cb47fa4619248f3d83f0f662671dadc6e2d31c2f41db0161651c7c076")


class CryptoSession:
    """Ephemeral key pair and shared secret used to encrypt the login password."""

    def __init__(self, private_key: ec.EllipticCurvePrivateKey = None,
                 server_public_key: str = SERVER_PUBLIC_KEY):
        if private_key is None:
            private_key = ec.generate_private_key(ec.SECP256R1())
        self._private_key = private_key
        server_key = ec.EllipticCurvePublicKey.from_encoded_point(
            ec.SECP256R1(), bytes.fromhex(server_public_key))
        self.shared_secret = private_key.exchange(ec.ECDH(), server_key)
        # Uncompressed SEC1 point, hex encoded
        self.public_key = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.UncompressedPoint
        ).hex()
        log.debug(f"Generated login key pair (public key {self.public_key[:16]}...)")

    def encrypt(self, password: str) -> str:
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(password.encode('utf-8')) + padder.finalize()
        encryptor = Cipher(algorithms.AES(self.shared_secret),
                           modes.CBC(self.shared_secret[:16])).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return base64.b64encode(ciphertext).decode('ascii')
