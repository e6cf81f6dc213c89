"""Closed value sets used throughout the architecture model.

Every enumeration is a ``str`` enum whose value is the canonical string used
in model files.  Declaration order is significant: it defines the ordinal
scale that rules compare against (``public < internal < ...``), so members
compare by position rather than alphabetically.
"""

from __future__ import annotations

from enum import Enum


class OrderedEnum(str, Enum):
    """String enum ordered by declaration position."""

    def __str__(self) -> str:
        return self.value

    @property
    def ordinal(self) -> int:
        return type(self)._member_names_.index(self.name)

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]

    @classmethod
    def parse(cls, value):
        """Return the member whose canonical string equals *value*.

        Raises ``ValueError`` for anything outside the closed set.
        """
        text = "" if value is None else str(value).strip()
        for member in cls:
            if member.value == text:
                return member
        raise ValueError(f"unknown {cls.__name__} value: {value}")

    def _check(self, other) -> bool:
        return type(other) is type(self)

    def __lt__(self, other):
        if not self._check(other):
            return NotImplemented
        return self.ordinal < other.ordinal

    def __le__(self, other):
        if not self._check(other):
            return NotImplemented
        return self.ordinal <= other.ordinal

    def __gt__(self, other):
        if not self._check(other):
            return NotImplemented
        return self.ordinal > other.ordinal

    def __ge__(self, other):
        if not self._check(other):
            return NotImplemented
        return self.ordinal >= other.ordinal


# ---------------------------------------------------------------------------
# Data classification
# ---------------------------------------------------------------------------

class Quantity(OrderedEnum):
    VERY_FEW = "very-few"
    FEW = "few"
    MANY = "many"
    VERY_MANY = "very-many"

    @property
    def factor(self) -> float:
        return _QUANTITY_FACTORS[self]


_QUANTITY_FACTORS = {
    Quantity.VERY_FEW: 1.0,
    Quantity.FEW: 2.0,
    Quantity.MANY: 3.0,
    Quantity.VERY_MANY: 5.0,
}


class Confidentiality(OrderedEnum):
    PUBLIC = "public"
    INTERNAL = "internal"
    RESTRICTED = "restricted"
    CONFIDENTIAL = "confidential"
    STRICTLY_CONFIDENTIAL = "strictly-confidential"

    @property
    def attacker_attractiveness_for_asset(self) -> float:
        return (8.0, 13.0, 21.0, 34.0, 55.0)[self.ordinal]


class Criticality(OrderedEnum):
    ARCHIVE = "archive"
    OPERATIONAL = "operational"
    IMPORTANT = "important"
    CRITICAL = "critical"
    MISSION_CRITICAL = "mission-critical"

    @property
    def attacker_attractiveness_for_asset(self) -> float:
        return (5.0, 8.0, 13.0, 21.0, 34.0)[self.ordinal]


class Usage(OrderedEnum):
    BUSINESS = "business"
    DEVOPS = "devops"


class DataFormat(OrderedEnum):
    JSON = "json"
    XML = "xml"
    SERIALIZATION = "serialization"
    FILE = "file"
    CSV = "csv"


class EncryptionStyle(OrderedEnum):
    NONE = "none"
    TRANSPARENT = "transparent"
    DATA_WITH_SYMMETRIC_SHARED_KEY = "data-with-symmetric-shared-key"
    DATA_WITH_ASYMMETRIC_SHARED_KEY = "data-with-asymmetric-shared-key"
    DATA_WITH_ENDUSER_INDIVIDUAL_KEY = "data-with-enduser-individual-key"


# ---------------------------------------------------------------------------
# Technical assets
# ---------------------------------------------------------------------------

class TechnicalAssetType(OrderedEnum):
    EXTERNAL_ENTITY = "external-entity"
    PROCESS = "process"
    DATASTORE = "datastore"


class TechnicalAssetSize(OrderedEnum):
    SYSTEM = "system"
    SERVICE = "service"
    APPLICATION = "application"
    COMPONENT = "component"


class TechnicalAssetMachine(OrderedEnum):
    PHYSICAL = "physical"
    VIRTUAL = "virtual"
    CONTAINER = "container"
    SERVERLESS = "serverless"


class Technology(OrderedEnum):
    UNKNOWN_TECHNOLOGY = "unknown-technology"
    CLIENT_SYSTEM = "client-system"
    BROWSER = "browser"
    DESKTOP = "desktop"
    MOBILE_APP = "mobile-app"
    DEVOPS_CLIENT = "devops-client"
    WEB_SERVER = "web-server"
    WEB_APPLICATION = "web-application"
    APPLICATION_SERVER = "application-server"
    DATABASE = "database"
    FILE_SERVER = "file-server"
    LOCAL_FILE_SYSTEM = "local-file-system"
    ERP = "erp"
    CMS = "cms"
    WEB_SERVICE_REST = "web-service-rest"
    WEB_SERVICE_SOAP = "web-service-soap"
    EJB = "ejb"
    SEARCH_INDEX = "search-index"
    SEARCH_ENGINE = "search-engine"
    SERVICE_REGISTRY = "service-registry"
    REVERSE_PROXY = "reverse-proxy"
    LOAD_BALANCER = "load-balancer"
    BUILD_PIPELINE = "build-pipeline"
    SOURCECODE_REPOSITORY = "sourcecode-repository"
    ARTIFACT_REGISTRY = "artifact-registry"
    CODE_INSPECTION_PLATFORM = "code-inspection-platform"
    MONITORING = "monitoring"
    LDAP_SERVER = "ldap-server"
    CONTAINER_PLATFORM = "container-platform"
    BATCH_PROCESSING = "batch-processing"
    EVENT_LISTENER = "event-listener"
    IDENTITY_PROVIDER = "identity-provider"
    IDENTITY_STORE_LDAP = "identity-store-ldap"
    IDENTITY_STORE_DATABASE = "identity-store-database"
    TOOL = "tool"
    CLI = "cli"
    TASK = "task"
    FUNCTION = "function"
    GATEWAY = "gateway"
    IOT_DEVICE = "iot-device"
    MESSAGE_QUEUE = "message-queue"
    STREAM_PROCESSING = "stream-processing"
    SERVICE_MESH = "service-mesh"
    DATA_LAKE = "data-lake"
    BIG_DATA_PLATFORM = "big-data-platform"
    REPORT_ENGINE = "report-engine"
    AI = "ai"
    MAIL_SERVER = "mail-server"
    VAULT = "vault"
    HSM = "hsm"
    WAF = "waf"
    IDS = "ids"
    IPS = "ips"
    SCHEDULER = "scheduler"
    MAINFRAME = "mainframe"
    BLOCK_STORAGE = "block-storage"
    LIBRARY = "library"

    def is_web_application(self) -> bool:
        return self in _WEB_APPLICATIONS

    def is_web_service(self) -> bool:
        return self in (Technology.WEB_SERVICE_REST, Technology.WEB_SERVICE_SOAP)

    def is_identity_related(self) -> bool:
        return self in _IDENTITY_RELATED

    def is_unprotected_comms_tolerated(self) -> bool:
        return self in _MONITORING_LIKE

    def is_unnecessary_data_tolerated(self) -> bool:
        return self in _MONITORING_LIKE

    def is_close_to_high_value_targets_tolerated(self) -> bool:
        return self in _MONITORING_LIKE or self in (Technology.LOAD_BALANCER, Technology.REVERSE_PROXY)

    def is_client(self) -> bool:
        return self in _CLIENTS

    def is_usually_able_to_propagate_identity_to_outgoing_targets(self) -> bool:
        return self in _IDENTITY_PROPAGATING

    def is_less_protected_type(self) -> bool:
        return self in _LESS_PROTECTED

    def is_usually_processing_enduser_requests(self) -> bool:
        return self in _ENDUSER_REQUEST_PROCESSING

    def is_usually_storing_enduser_data(self) -> bool:
        return self in _ENDUSER_DATA_STORING

    def is_exclusively_frontend_related(self) -> bool:
        return self in _FRONTEND_ONLY

    def is_exclusively_backend_related(self) -> bool:
        return self in _BACKEND_ONLY

    def is_development_relevant(self) -> bool:
        return self in _DEVELOPMENT_RELEVANT

    def is_traffic_forwarding(self) -> bool:
        return self in (Technology.LOAD_BALANCER, Technology.REVERSE_PROXY, Technology.WAF)

    def is_embedded_component(self) -> bool:
        return self is Technology.LIBRARY


T = Technology

_WEB_APPLICATIONS = frozenset({
    T.WEB_SERVER, T.WEB_APPLICATION, T.APPLICATION_SERVER, T.ERP, T.CMS,
    T.IDENTITY_PROVIDER, T.REPORT_ENGINE,
})
_IDENTITY_RELATED = frozenset({
    T.IDENTITY_PROVIDER, T.IDENTITY_STORE_LDAP, T.IDENTITY_STORE_DATABASE,
})
_MONITORING_LIKE = frozenset({T.MONITORING, T.IDS, T.IPS})
_CLIENTS = frozenset({
    T.CLIENT_SYSTEM, T.BROWSER, T.DESKTOP, T.MOBILE_APP, T.DEVOPS_CLIENT, T.IOT_DEVICE,
})
_IDENTITY_PROPAGATING = frozenset({
    T.CLIENT_SYSTEM, T.BROWSER, T.DESKTOP, T.MOBILE_APP, T.DEVOPS_CLIENT,
    T.WEB_SERVER, T.WEB_APPLICATION, T.APPLICATION_SERVER, T.ERP, T.CMS,
    T.WEB_SERVICE_REST, T.WEB_SERVICE_SOAP, T.EJB, T.SEARCH_ENGINE,
    T.REVERSE_PROXY, T.LOAD_BALANCER, T.IDENTITY_PROVIDER, T.TOOL, T.CLI,
    T.TASK, T.FUNCTION, T.GATEWAY, T.IOT_DEVICE, T.MESSAGE_QUEUE,
    T.SERVICE_MESH, T.REPORT_ENGINE, T.WAF, T.LIBRARY,
})
_LESS_PROTECTED = frozenset({
    T.CLIENT_SYSTEM, T.BROWSER, T.DESKTOP, T.MOBILE_APP, T.DEVOPS_CLIENT,
    T.WEB_SERVER, T.WEB_APPLICATION, T.APPLICATION_SERVER, T.CMS,
    T.WEB_SERVICE_REST, T.WEB_SERVICE_SOAP, T.EJB, T.BUILD_PIPELINE,
    T.SOURCECODE_REPOSITORY, T.ARTIFACT_REGISTRY, T.CODE_INSPECTION_PLATFORM,
    T.MONITORING, T.IOT_DEVICE, T.AI, T.MAIL_SERVER, T.SCHEDULER, T.MAINFRAME,
})
_ENDUSER_REQUEST_PROCESSING = frozenset({
    T.WEB_SERVER, T.WEB_APPLICATION, T.APPLICATION_SERVER, T.ERP,
    T.WEB_SERVICE_REST, T.WEB_SERVICE_SOAP, T.EJB, T.REPORT_ENGINE,
})
_ENDUSER_DATA_STORING = frozenset({
    T.DATABASE, T.ERP, T.FILE_SERVER, T.LOCAL_FILE_SYSTEM, T.BLOCK_STORAGE,
    T.MAIL_SERVER, T.STREAM_PROCESSING, T.MESSAGE_QUEUE,
})
_FRONTEND_ONLY = frozenset({
    T.CLIENT_SYSTEM, T.BROWSER, T.DESKTOP, T.MOBILE_APP, T.DEVOPS_CLIENT,
    T.CMS, T.REVERSE_PROXY, T.WAF, T.LOAD_BALANCER, T.GATEWAY, T.IOT_DEVICE,
})
_BACKEND_ONLY = frozenset({
    T.DATABASE, T.IDENTITY_PROVIDER, T.IDENTITY_STORE_LDAP, T.IDENTITY_STORE_DATABASE,
    T.ERP, T.WEB_SERVICE_REST, T.WEB_SERVICE_SOAP, T.EJB, T.SEARCH_INDEX,
    T.SEARCH_ENGINE, T.CONTAINER_PLATFORM, T.BATCH_PROCESSING, T.EVENT_LISTENER,
    T.DATA_LAKE, T.BIG_DATA_PLATFORM, T.MESSAGE_QUEUE, T.STREAM_PROCESSING,
    T.SERVICE_MESH, T.VAULT, T.HSM, T.SCHEDULER, T.MAINFRAME, T.FILE_SERVER,
    T.BLOCK_STORAGE,
})
_DEVELOPMENT_RELEVANT = frozenset({
    T.BUILD_PIPELINE, T.SOURCECODE_REPOSITORY, T.ARTIFACT_REGISTRY,
    T.CODE_INSPECTION_PLATFORM, T.DEVOPS_CLIENT,
})

del T


# ---------------------------------------------------------------------------
# Communication links
# ---------------------------------------------------------------------------

class Protocol(OrderedEnum):
    UNKNOWN_PROTOCOL = "unknown-protocol"
    HTTP = "http"
    HTTPS = "https"
    WS = "ws"
    WSS = "wss"
    REVERSE_PROXY_WEB_PROTOCOL = "reverse-proxy-web-protocol"
    REVERSE_PROXY_WEB_PROTOCOL_ENCRYPTED = "reverse-proxy-web-protocol-encrypted"
    MQTT = "mqtt"
    JDBC = "jdbc"
    JDBC_ENCRYPTED = "jdbc-encrypted"
    ODBC = "odbc"
    ODBC_ENCRYPTED = "odbc-encrypted"
    SQL_ACCESS_PROTOCOL = "sql-access-protocol"
    SQL_ACCESS_PROTOCOL_ENCRYPTED = "sql-access-protocol-encrypted"
    NOSQL_ACCESS_PROTOCOL = "nosql-access-protocol"
    NOSQL_ACCESS_PROTOCOL_ENCRYPTED = "nosql-access-protocol-encrypted"
    BINARY = "binary"
    BINARY_ENCRYPTED = "binary-encrypted"
    TEXT = "text"
    TEXT_ENCRYPTED = "text-encrypted"
    SSH = "ssh"
    SSH_TUNNEL = "ssh-tunnel"
    SMTP = "smtp"
    SMTP_ENCRYPTED = "smtp-encrypted"
    POP3 = "pop3"
    POP3_ENCRYPTED = "pop3-encrypted"
    IMAP = "imap"
    IMAP_ENCRYPTED = "imap-encrypted"
    FTP = "ftp"
    FTPS = "ftps"
    SFTP = "sftp"
    SCP = "scp"
    LDAP = "ldap"
    LDAPS = "ldaps"
    JMS = "jms"
    NFS = "nfs"
    SMB = "smb"
    SMB_ENCRYPTED = "smb-encrypted"
    LOCAL_FILE_ACCESS = "local-file-access"
    NRPE = "nrpe"
    XMPP = "xmpp"
    IIOP = "iiop"
    IIOP_ENCRYPTED = "iiop-encrypted"
    JRMP = "jrmp"
    JRMP_ENCRYPTED = "jrmp-encrypted"
    IN_PROCESS_LIBRARY_CALL = "in-process-library-call"
    CONTAINER_SPAWNING = "container-spawning"

    def is_process_local(self) -> bool:
        return self in (
            Protocol.IN_PROCESS_LIBRARY_CALL,
            Protocol.LOCAL_FILE_ACCESS,
            Protocol.CONTAINER_SPAWNING,
        )

    def is_encrypted(self) -> bool:
        return self in _ENCRYPTED_PROTOCOLS

    def is_potential_database_access_protocol(self, including_lax_database_protocols: bool) -> bool:
        strict = self in _DATABASE_PROTOCOLS
        if including_lax_database_protocols:
            # include HTTP for REST-based NoSQL-DBs as well as unknown binary
            return strict or self in (
                Protocol.HTTPS, Protocol.HTTP, Protocol.BINARY, Protocol.BINARY_ENCRYPTED,
            )
        return strict

    def is_potential_web_access_protocol(self) -> bool:
        return self in (
            Protocol.HTTP, Protocol.HTTPS, Protocol.WS, Protocol.WSS,
            Protocol.REVERSE_PROXY_WEB_PROTOCOL, Protocol.REVERSE_PROXY_WEB_PROTOCOL_ENCRYPTED,
        )


_ENCRYPTED_PROTOCOLS = frozenset({
    Protocol.HTTPS, Protocol.WSS, Protocol.JDBC_ENCRYPTED, Protocol.ODBC_ENCRYPTED,
    Protocol.NOSQL_ACCESS_PROTOCOL_ENCRYPTED, Protocol.SQL_ACCESS_PROTOCOL_ENCRYPTED,
    Protocol.BINARY_ENCRYPTED, Protocol.TEXT_ENCRYPTED, Protocol.SSH, Protocol.SSH_TUNNEL,
    Protocol.FTPS, Protocol.SFTP, Protocol.SCP, Protocol.LDAPS,
    Protocol.REVERSE_PROXY_WEB_PROTOCOL_ENCRYPTED, Protocol.IIOP_ENCRYPTED,
    Protocol.JRMP_ENCRYPTED, Protocol.SMB_ENCRYPTED, Protocol.SMTP_ENCRYPTED,
    Protocol.POP3_ENCRYPTED, Protocol.IMAP_ENCRYPTED,
})

_DATABASE_PROTOCOLS = frozenset({
    Protocol.JDBC_ENCRYPTED, Protocol.ODBC_ENCRYPTED,
    Protocol.NOSQL_ACCESS_PROTOCOL_ENCRYPTED, Protocol.SQL_ACCESS_PROTOCOL_ENCRYPTED,
    Protocol.JDBC, Protocol.ODBC, Protocol.NOSQL_ACCESS_PROTOCOL, Protocol.SQL_ACCESS_PROTOCOL,
})


class Authentication(OrderedEnum):
    NONE = "none"
    CREDENTIALS = "credentials"
    SESSION_ID = "session-id"
    TOKEN = "token"
    CLIENT_CERTIFICATE = "client-certificate"
    TWO_FACTOR = "two-factor"
    EXTERNALIZED = "externalized"


class Authorization(OrderedEnum):
    NONE = "none"
    TECHNICAL_USER = "technical-user"
    ENDUSER_IDENTITY_PROPAGATION = "enduser-identity-propagation"


# ---------------------------------------------------------------------------
# Trust boundaries
# ---------------------------------------------------------------------------

class TrustBoundaryType(OrderedEnum):
    NETWORK_ON_PREM = "network-on-prem"
    NETWORK_DEDICATED_HOSTER = "network-dedicated-hoster"
    NETWORK_VIRTUAL_LAN = "network-virtual-lan"
    NETWORK_CLOUD_PROVIDER = "network-cloud-provider"
    NETWORK_CLOUD_SECURITY_GROUP = "network-cloud-security-group"
    NETWORK_POLICY_NAMESPACE_ISOLATION = "network-policy-namespace-isolation"
    EXECUTION_ENVIRONMENT = "execution-environment"

    def is_network_boundary(self) -> bool:
        return self is not TrustBoundaryType.EXECUTION_ENVIRONMENT

    def is_within_cloud(self) -> bool:
        return self in (
            TrustBoundaryType.NETWORK_CLOUD_PROVIDER,
            TrustBoundaryType.NETWORK_CLOUD_SECURITY_GROUP,
        )


# ---------------------------------------------------------------------------
# Risks
# ---------------------------------------------------------------------------

class RiskSeverity(OrderedEnum):
    LOW = "low"
    MEDIUM = "medium"
    ELEVATED = "elevated"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def title(self) -> str:
        return self.value.capitalize()


class RiskExploitationLikelihood(OrderedEnum):
    UNLIKELY = "unlikely"
    LIKELY = "likely"
    VERY_LIKELY = "very-likely"
    FREQUENT = "frequent"

    @property
    def weight(self) -> int:
        return self.ordinal + 1


class RiskExploitationImpact(OrderedEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very-high"

    @property
    def weight(self) -> int:
        return self.ordinal + 1


class DataBreachProbability(OrderedEnum):
    IMPROBABLE = "improbable"
    POSSIBLE = "possible"
    PROBABLE = "probable"


class RiskFunction(OrderedEnum):
    BUSINESS_SIDE = "business-side"
    ARCHITECTURE = "architecture"
    DEVELOPMENT = "development"
    OPERATIONS = "operations"

    @property
    def title(self) -> str:
        return ("Business Side", "Architecture", "Development", "Operations")[self.ordinal]


class STRIDE(OrderedEnum):
    SPOOFING = "spoofing"
    TAMPERING = "tampering"
    REPUDIATION = "repudiation"
    INFORMATION_DISCLOSURE = "information-disclosure"
    DENIAL_OF_SERVICE = "denial-of-service"
    ELEVATION_OF_PRIVILEGE = "elevation-of-privilege"

    @property
    def title(self) -> str:
        return (
            "Spoofing", "Tampering", "Repudiation", "Information Disclosure",
            "Denial of Service", "Elevation of Privilege",
        )[self.ordinal]


class RiskStatus(OrderedEnum):
    UNCHECKED = "unchecked"
    IN_DISCUSSION = "in-discussion"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in-progress"
    MITIGATED = "mitigated"
    FALSE_POSITIVE = "false-positive"

    @property
    def title(self) -> str:
        return (
            "Unchecked", "in Discussion", "Accepted", "in Progress",
            "Mitigated", "False Positive",
        )[self.ordinal]

    def is_still_at_risk(self) -> bool:
        return self in (
            RiskStatus.UNCHECKED,
            RiskStatus.IN_DISCUSSION,
            RiskStatus.ACCEPTED,
            RiskStatus.IN_PROGRESS,
        )


# Criticality values double as business criticality of the whole application.
BusinessCriticality = Criticality


ALL_ENUMS: dict[str, type[OrderedEnum]] = {
    "quantity": Quantity,
    "confidentiality": Confidentiality,
    "criticality": Criticality,
    "usage": Usage,
    "data_format": DataFormat,
    "encryption": EncryptionStyle,
    "technical_asset_type": TechnicalAssetType,
    "technical_asset_size": TechnicalAssetSize,
    "technical_asset_machine": TechnicalAssetMachine,
    "technology": Technology,
    "protocol": Protocol,
    "authentication": Authentication,
    "authorization": Authorization,
    "trust_boundary_type": TrustBoundaryType,
    "severity": RiskSeverity,
    "exploitation_likelihood": RiskExploitationLikelihood,
    "exploitation_impact": RiskExploitationImpact,
    "data_breach_probability": DataBreachProbability,
    "function": RiskFunction,
    "stride": STRIDE,
    "status": RiskStatus,
}
