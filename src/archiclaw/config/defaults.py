"""
archiclaw.config.defaults - Default configuration values.
"""

DEFAULT_CONFIG = {
    "landscape": {
        # Relative paths resolve against the directory holding .archiclaw.toml
        "root": "landscape",
    },
    "layout": {
        "config_dir": ".archiclaw",
        "organization_file": "config.yaml",
        "sequences_file": "id-sequences.yaml",
        "model_dir": "model",
        "domains_dir": "domains",
        "applications_dir": "applications",
        "capabilities_dir": "capabilities",
        "data_entities_dir": "data-entities",
        "integrations_dir": "integrations",
        "changes_dir": "changes",
        "index_file": "_index.yaml",
        "domain_file": "domain.yaml",
        "passport_file": "passport.yaml",
        "change_file": "change.yaml",
        "record_suffix": ".yaml",
    },
    "rules": {
        "check_capability_hierarchy": False,
        "check_data_entity_references": False,
        "check_integration_references": False,
        "skip_codes": [],
    },
    "bundle": {
        "output": "landscape-data.json",
    },
    "server": {
        "host": "127.0.0.1",
        "port": 8080,
    },
    "logging": {
        "level": "WARNING",
    },
}
