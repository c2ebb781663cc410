from django.contrib.sitemaps import Sitemap
from django.utils import timezone

from core.locales import LOCALES
from core.site_config import get_site_config


class LocalizedPageSitemap(Sitemap):
    """One entry per localized sale page, served from the listed domain."""

    changefreq = 'weekly'
    priority = 1.0
    protocol = 'https'

    def items(self):
        return list(LOCALES)

    def location(self, locale):
        return f'/{locale}'

    def lastmod(self, locale):
        return timezone.now()

    def get_domain(self, site=None):
        return get_site_config().domain_name


sitemaps = {
    'pages': LocalizedPageSitemap,
}
