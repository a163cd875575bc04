"""Known-weak SSH algorithms, TLS cipher suites and cipher grades."""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping

SSH_ALGORITHMS = "ssh2-enum-algos"
SSL_CIPHERS = "ssl-enum-ciphers-ciphers"
SSL_GRADES = "ssl-enum-ciphers-grades"
SSL_WITHOUT_PFS = "ssl-cipher-suits-without-pfs"


def _words(*groups: str) -> list[str]:
    return [word for group in groups for word in group.split()]


_WEAK_SSH = frozenset(
    _words(
        # encryption
        "3des-cbc aes128-cbc aes192-cbc aes256-cbc blowfish-cbc cast128-cbc none",
        "arcfour arcfour128 arcfour256 arcforu256",
        # key exchange
        "diffie-hellman-group1-sha1 diffie-hellman-group1-sha256",
        "diffie-hellman-group14-sha1 diffie-hellman-group-exchange-sha1",
        " ".join(
            f"gss-{group}-sha1{tail}"
            for group in ("gex", "group1", "group14")
            for tail in ("", "-")
        ),
        # message authentication
        "hmac-md5 hmac-md5-96 hmac-ripemd160 hmac-sha1 hmac-sha1-96",
        "hmac-sha2-256-96 hmac-sha2-512-96",
        # host keys
        "ssh-dsa ssh-rsa ssh-rsa1",
    )
)


def _modes(cipher: str, modes: str) -> str:
    return " ".join(f"{cipher}_{mode}" for mode in modes.split())


_LEGACY_MODES = "128_CBC_SHA 128_CBC_SHA256 128_GCM_SHA256 256_CBC_SHA 256_CBC_SHA256 256_GCM_SHA384"
_SHA2_MODES = "128_CBC_SHA256 128_GCM_SHA256 256_CBC_SHA384 256_GCM_SHA384"
_SHA384_MODES = "128_CBC_SHA 128_CBC_SHA256 128_GCM_SHA256 256_CBC_SHA 256_CBC_SHA384 256_GCM_SHA384"

_CCM = "AES_128_CCM AES_128_CCM_8 AES_256_CCM AES_256_CCM_8"

# Suites offered by the finite-field Diffie-Hellman and plain RSA families.
_CLASSIC = " ".join(
    (
        "3DES_EDE_CBC_SHA DES_CBC_SHA SEED_CBC_SHA",
        _modes("AES", _LEGACY_MODES),
        _modes("ARIA", _SHA2_MODES),
        _modes("CAMELLIA", _LEGACY_MODES),
    )
)

# Suites offered by the pre-shared-key families.
_PRE_SHARED = " ".join(
    (
        "3DES_EDE_CBC_SHA CHACHA20_POLY1305_SHA256 RC4_128_SHA",
        "NULL_SHA NULL_SHA256 NULL_SHA384",
        _modes("AES", _SHA384_MODES),
        _modes("ARIA", _SHA2_MODES),
        _modes("CAMELLIA", _SHA2_MODES),
    )
)

# Suites offered by static elliptic-curve Diffie-Hellman.
_STATIC_EC = " ".join(
    (
        "3DES_EDE_CBC_SHA NULL_SHA RC4_128_SHA",
        _modes("AES", _SHA384_MODES),
        _modes("ARIA", _SHA2_MODES),
        _modes("CAMELLIA", _SHA2_MODES),
    )
)

# CBC-only and broken suites offered by ephemeral elliptic-curve Diffie-Hellman.
_EPHEMERAL_EC = " ".join(
    (
        "3DES_EDE_CBC_SHA NULL_SHA RC4_128_SHA",
        _modes("AES", "128_CBC_SHA 128_CBC_SHA256 256_CBC_SHA 256_CBC_SHA384"),
        _modes("ARIA", "128_CBC_SHA256 256_CBC_SHA384"),
        _modes("CAMELLIA", "128_CBC_SHA256 256_CBC_SHA384"),
    )
)

_SRP = "3DES_EDE_CBC_SHA AES_128_CBC_SHA AES_256_CBC_SHA"

_FAMILIES: tuple[tuple[str, str, str], ...] = (
    # (key exchange, ciphers after "_WITH_", ciphers after "_EXPORT_WITH_")
    ("DH_anon", _CLASSIC + " RC4_128_MD5", "DES40_CBC_SHA RC4_40_MD5"),
    ("DH_DSS", _CLASSIC, "DES40_CBC_SHA"),
    ("DHE_DSS", _CLASSIC, "DES40_CBC_SHA"),
    ("DH_RSA", _CLASSIC, "DES40_CBC_SHA"),
    ("DHE_RSA", f"{_CLASSIC} {_CCM} CHACHA20_POLY1305_SHA256", "DES40_CBC_SHA"),
    (
        "RSA",
        f"{_CLASSIC} {_CCM} IDEA_CBC_SHA NULL_MD5 NULL_SHA NULL_SHA256 RC4_128_MD5 RC4_128_SHA",
        "DES40_CBC_SHA RC2_CBC_40_MD5 RC4_40_MD5",
    ),
    ("PSK", f"{_PRE_SHARED} {_CCM}", ""),
    ("DHE_PSK", _PRE_SHARED + " AES_128_CCM AES_256_CCM", ""),
    ("RSA_PSK", _PRE_SHARED, ""),
    ("PSK_DHE", "AES_128_CCM_8 AES_256_CCM_8", ""),
    ("ECDHE_PSK", _EPHEMERAL_EC + " NULL_SHA256 NULL_SHA384", ""),
    ("ECDH_ECDSA", _STATIC_EC, ""),
    ("ECDH_RSA", _STATIC_EC, ""),
    ("ECDHE_ECDSA", _EPHEMERAL_EC, ""),
    ("ECDHE_RSA", _EPHEMERAL_EC, ""),
    ("ECDH_anon", "3DES_EDE_CBC_SHA AES_128_CBC_SHA AES_256_CBC_SHA NULL_SHA RC4_128_SHA", ""),
    (
        "GOSTR341112_256",
        "28147_CNT_IMIT KUZNYECHIK_CTR_OMAC KUZNYECHIK_MGM_L KUZNYECHIK_MGM_S "
        "MAGMA_CTR_OMAC MAGMA_MGM_L MAGMA_MGM_S",
        "",
    ),
    (
        "KRB5",
        " ".join(
            f"{cipher}_{digest}"
            for cipher in ("3DES_EDE_CBC", "DES_CBC", "IDEA_CBC", "RC4_128")
            for digest in ("MD5", "SHA")
        ),
        " ".join(
            f"{cipher}_{digest}"
            for cipher in ("DES_CBC_40", "RC2_CBC_40", "RC4_40")
            for digest in ("MD5", "SHA")
        ),
    ),
    ("NULL", "NULL_NULL", ""),
    ("SRP_SHA", _SRP, ""),
    ("SRP_SHA_DSS", _SRP, ""),
    ("SRP_SHA_RSA", _SRP, ""),
)

# Names that carry no key-exchange part.
_BARE_SUITES = "SHA256_SHA256 SHA384_SHA384 SM4_CCM_SM3 SM4_GCM_SM3"


def _suite_names(families: Iterable[tuple[str, str, str]]) -> frozenset[str]:
    names: set[str] = {f"TLS_{name}" for name in _BARE_SUITES.split()}
    for exchange, ciphers, exports in families:
        names.update(f"TLS_{exchange}_WITH_{c}" for c in ciphers.split())
        names.update(f"TLS_{exchange}_EXPORT_WITH_{c}" for c in exports.split())
    return frozenset(names)


_WEAK_TLS_CIPHERS = _suite_names(_FAMILIES)

_WEAK_GRADES = frozenset("BCDEF")

_WITHOUT_PFS = frozenset(_words("_ECDHE_ _DHE_"))

WEAK: Mapping[str, frozenset[str]] = MappingProxyType(
    {
        SSH_ALGORITHMS: _WEAK_SSH,
        SSL_CIPHERS: _WEAK_TLS_CIPHERS,
        SSL_GRADES: _WEAK_GRADES,
        SSL_WITHOUT_PFS: _WITHOUT_PFS,
    }
)

_SSH_KEY_KINDS = {
    "kex": "KEX",
    "mac": "MAC",
    "server_host_key": "Server Host Key",
    "compression": "Compression",
    "encryption": "Encryption",
}

KEY_LABELS: Mapping[str, str] = MappingProxyType(
    {
        **{f"{kind}_algorithms": f"{label} Algorithm" for kind, label in _SSH_KEY_KINDS.items()},
        **{f"TLSv1.{minor}": f"TLSv1.{minor} Cipher" for minor in range(3)},
    }
)


def is_weak(category: str, value: str) -> bool:
    """Tell whether ``value`` is listed as weak under ``category``.

    Matching is exact; an unknown category lists nothing.
    """
    return value in WEAK.get(category, frozenset())


def column_label(key: str) -> str:
    """Return the report label for an nmap script table key, or the key itself."""
    return KEY_LABELS.get(key, key)