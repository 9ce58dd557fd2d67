from cycle_admin.business.enterprises.directory import EnterpriseDirectory

__all__ = ['EnterpriseDirectory']
