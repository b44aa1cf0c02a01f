"""Application layer: DTOs, repository ports and the cache-aside service.

Depends only on domain and protocol definitions (DIP). Infrastructure
implements the repository interfaces. Import services from
omni.application.services.
"""
