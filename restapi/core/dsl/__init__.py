from restapi.core.dsl.render import create_environment, render_template

__all__ = ['create_environment', 'render_template']
