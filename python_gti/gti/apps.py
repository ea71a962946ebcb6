from django.apps import AppConfig


class GtiConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'gti'
    verbose_name = 'GTI call integration'

    def ready(self):
        from gti.services.dispatcher import PostbackDispatcher

        # One delivery queue per process; see gti.services.postbacks.get_dispatcher
        self.dispatcher = PostbackDispatcher()
