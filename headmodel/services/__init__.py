"""
Service layer: HeadModelService ABC and HeadModelRegistry.

Each computation exposed over HTTP (currently the Berg residual) is a
HeadModelService registered with the HeadModelRegistry. Services are looked
up by ID at runtime, and each service owns its own API endpoints, input
validation and result format.

Classes:
    HeadModelService  - Abstract base class for all services
    HeadModelRegistry - Central lookup container for registered services

IMPORTANT: No unicode characters allowed (Windows charmap constraint).
"""

from abc import ABC, abstractmethod


class HeadModelService(ABC):
    """
    Abstract base class for a head-model service.

    Class Attributes
    ----------------
    id : str
        Unique service identifier (e.g. "berg").
    name : str
        Human-readable display name.
    description : str
        One-liner for listings.
    category : str
        Grouping, e.g. "forward_model".
    route : str
        API prefix owned by the service (e.g. "/api/berg").
    """

    id = ""
    name = ""
    description = ""
    category = ""
    route = ""

    @abstractmethod
    def validate(self, config):
        """
        Validate raw input and return normalized config dict.

        Parameters
        ----------
        config : dict
            Raw request payload.

        Returns
        -------
        dict
            Normalized, validated configuration.

        Raises
        ------
        ValueError
            If the config is invalid.
        """

    @abstractmethod
    def compute(self, config):
        """
        Run the service computation and return results.

        Parameters
        ----------
        config : dict
            Validated configuration from validate().

        Returns
        -------
        dict
            JSON-serializable result with service-specific keys.
        """

    def register_routes(self, blueprint):
        """
        Mount service-specific API endpoints onto a Flask blueprint.

        Services with HTTP endpoints override this; the default mounts nothing.
        """
        pass

    def metadata(self):
        """Service info: id, name, description, category, route."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "route": self.route,
        }


class HeadModelRegistry:
    """
    Central lookup container for registered HeadModelService instances.

    Services are registered at app startup; the registry provides lookup
    by ID, listing, and iteration over services for route mounting.
    """

    def __init__(self):
        self._services = {}

    def register(self, service):
        """
        Register a service instance.

        Raises
        ------
        ValueError
            If a service with the same id is already registered.
        """
        if service.id in self._services:
            raise ValueError(
                "Service '{}' is already registered".format(service.id)
            )
        self._services[service.id] = service

    def get(self, service_id):
        """Look up a service by id. Returns None if not found."""
        return self._services.get(service_id)

    def list_all(self):
        """Metadata for all registered services, in registration order."""
        return [s.metadata() for s in self._services.values()]

    def services(self):
        """All registered service instances, in registration order."""
        return list(self._services.values())
