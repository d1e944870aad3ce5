import secrets
import string


class RANDOM:
    """Random strings for passwords and secrets"""

    ALPHANUM = string.ascii_letters + string.digits

    def __init__():
        pass

    def long(self, length=24):
        """Password sized random string"""
        return ''.join(secrets.choice(RANDOM.ALPHANUM) for _ in range(length))

    def blowfish(self):
        """phpMyAdmin blowfish_secret, exactly 32 bytes"""
        return RANDOM.long(self, 32)
