from linkstore.domain.link.service.linking import LinkingService

__all__ = ["LinkingService"]
