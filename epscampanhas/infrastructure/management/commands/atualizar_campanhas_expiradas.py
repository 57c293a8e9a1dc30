from django.core.management.base import BaseCommand

from epscampanhas.core.dependency_injection import get_gerenciar_campanhas_use_case


class Command(BaseCommand):
    help = 'Marca como EXPIRADA toda campanha ativa cuja data de término já passou (agendar via cron)'

    def handle(self, *args, **kwargs):
        total = get_gerenciar_campanhas_use_case().atualizar_expiradas()
        if total:
            self.stdout.write(self.style.SUCCESS(f'{total} campanha(s) marcada(s) como expirada(s).'))
        else:
            self.stdout.write('Nenhuma campanha para expirar.')
