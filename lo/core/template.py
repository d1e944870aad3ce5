import os

import pystache

from lo.core.logging import Log

TEMPLATE_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
    'cli', 'templates')

# configuration files are not HTML, never escape values
_renderer = pystache.Renderer(search_dirs=[TEMPLATE_DIR],
                              file_encoding='utf-8',
                              escape=lambda value: value)


class LOTemplate:
    """LaraOps template utilities"""

    def __init__():
        pass

    @staticmethod
    def render(template, data):
        """Render a mustache template from lo/cli/templates to text"""
        return _renderer.render_path(os.path.join(TEMPLATE_DIR, template),
                                     dict(data))

    def deploy(self, fileconf, template, data, overwrite=True):
        """Deploy template, return False when an existing file was kept"""
        if os.path.isfile(fileconf) and not overwrite:
            Log.debug(self, 'keeping existing {0}'.format(fileconf))
            return False
        Log.debug(self, 'writting the {0} file'.format(fileconf))
        content = LOTemplate.render(template, data)
        with open(fileconf, encoding='utf-8', mode='w') as lotemplate:
            lotemplate.write(content)
        return True
