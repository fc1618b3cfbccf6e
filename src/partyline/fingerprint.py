""" Per-packet authorization tokens. Every outbound packet is stamped with
    a timestamp and a fingerprint: the sender's worker id, followed by a
    random nonce, encrypted with a key derived from the shared password and
    the timestamp. A recipient holding the same shared secret decrypts the
    fingerprint and confirms that it names the claimed sender.

    The key derivation and cipher match what existing bus deployments use:
    AES-256 in CTR mode, with the key and IV derived from the passphrase via
    OpenSSL's EVP_BytesToKey (MD5, one round, no salt). The token is the
    hex encoding of the ciphertext.
"""

import hashlib
import logging
import secrets
import time

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

logger = logging.getLogger(__name__)

# The nonce is rendered as hex before encryption; its length in characters
# is fixed so that the recipient knows how much to strip.

nonce_bytes = 8
nonce_length = nonce_bytes * 2

key_length = 32
iv_length = 16


def derive(passphrase):
    """ Return the (key, iv) pair for the given *passphrase*, using the same
        derivation as OpenSSL's EVP_BytesToKey with MD5 and no salt.
    """

    try:
        passphrase = passphrase.encode()
    except AttributeError:
        pass

    derived = b''
    block = b''

    while len(derived) < key_length + iv_length:
        block = hashlib.md5(block + passphrase).digest()
        derived += block

    key = derived[:key_length]
    iv = derived[key_length:key_length + iv_length]
    return key, iv



def _cipher(secret, timestamp):

    passphrase = str(secret) + str(timestamp)
    key, iv = derive(passphrase)
    return Cipher(algorithms.AES(key), modes.CTR(iv))



def authorize(password, worker_id, timestamp):
    """ Return the fingerprint for *worker_id* at *timestamp*. The embedded
        nonce guarantees that no two fingerprints are identical, even for
        the same identity and timestamp.
    """

    nonce = secrets.token_hex(nonce_bytes)
    plaintext = str(worker_id) + nonce
    plaintext = plaintext.encode()

    encryptor = _cipher(password, timestamp).encryptor()
    ciphertext = encryptor.update(plaintext) + encryptor.finalize()

    return ciphertext.hex()



def identify(secret, timestamp, fingerprint):
    """ Decrypt the *fingerprint* with *secret* and *timestamp*, and return
        the identity embedded within it. None is returned if the fingerprint
        cannot possibly be valid.
    """

    try:
        ciphertext = bytes.fromhex(fingerprint)
    except (TypeError, ValueError):
        return None

    if len(ciphertext) < nonce_length:
        return None

    decryptor = _cipher(secret, timestamp).decryptor()
    plaintext = decryptor.update(ciphertext) + decryptor.finalize()

    try:
        plaintext = plaintext.decode()
    except UnicodeDecodeError:
        return None

    return plaintext[:-nonce_length]



def now():
    """ Return the current time as integer milliseconds since the epoch.
    """

    return int(time.time() * 1000)



class Fingerprint:
    """ Stamp outbound packets and verify inbound ones. The *configuration*
        is a :class:`partyline.config.Configuration` instance, providing the
        local shared password and the allow-list of remote senders; the
        *identity* is consulted for the bound worker id at stamping time.
    """

    def __init__(self, configuration, identity):

        self.configuration = configuration
        self.identity = identity


    def stamp(self, packet):
        """ Set the timestamp and fingerprint of the outbound *packet*, which
            is modified in place and returned. No fingerprint is applied until
            the bus has assigned a worker id; a fingerprint computed for an
            empty identity would be worthless.
        """

        timestamp = now()
        packet['timestamp'] = timestamp

        worker_id = self.identity.worker_id

        if worker_id:
            packet['fingerprint'] = authorize(self.configuration.password, worker_id, timestamp)
        else:
            logger.debug("no worker id bound yet, sending %r unfingerprinted", packet.get('type'))

        return packet


    def verify(self, packet):
        """ Return True if the *packet* carries a valid fingerprint for the
            sender named in its ``from`` field, according to the allow-list.
            Unknown senders, and packets missing any of the required fields,
            are rejected.
        """

        sender = packet.get('from')
        secret = self.configuration.secret(sender)

        if secret is None:
            return False

        try:
            timestamp = packet['timestamp']
            fingerprint = packet['fingerprint']
        except KeyError:
            return False

        if isinstance(fingerprint, str):
            pass
        else:
            return False

        identity = identify(secret, timestamp, fingerprint)
        return identity == sender


# end of class Fingerprint


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
