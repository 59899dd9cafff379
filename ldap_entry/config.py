import logging
import os
from typing import Any, Dict, Optional

import keyring
from keyring.errors import KeyringError
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

class LDAPConfig:
    """Centralized directory connection configuration."""

    @staticmethod
    def get_config() -> Dict[str, Any]:
        """Get connection configuration from environment variables."""
        config = {
            'hostname': os.getenv('LDAP_HOSTNAME'),
            'base_dn': os.getenv('LDAP_BASE_DN'),
            'use_ssl': os.getenv('LDAP_USE_SSL', '').lower() in ('1', 'true', 'yes'),
            'connect_timeout': int(os.getenv('LDAP_CONNECT_TIMEOUT', '30')),
            'binary_fields': [
                field.strip()
                for field in os.getenv('LDAP_BINARY_FIELDS', '').split(',')
                if field.strip()
            ],
        }

        port = os.getenv('LDAP_PORT')
        if port:
            config['port'] = int(port)

        bind_dn = os.getenv('LDAP_BIND_DN')
        if bind_dn:
            config.update({
                'bind_dn': bind_dn,
                'password': os.getenv('LDAP_PASSWORD'),
                'keyring_service': os.getenv('LDAP_KEYRING_SERVICE', 'ldap_entry'),
            })

        return config

    @staticmethod
    def get_password(config: Dict[str, Any]) -> Optional[str]:
        """
        Get the bind password from the config, falling back to the system keyring.

        Returns:
            Optional[str]: The password, or None if neither source has one
        """
        if config.get('password'):
            return config['password']

        service = config.get('keyring_service')
        user = config.get('bind_dn')
        if not service or not user:
            return None

        try:
            password = keyring.get_password(service, user)
        except KeyringError as e:
            logger.warning(f"Could not retrieve password from keyring: {e}")
            return None

        if password:
            logger.debug("Using password from keyring")
        return password
