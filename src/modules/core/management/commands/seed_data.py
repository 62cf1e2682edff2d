from __future__ import annotations

from django.core.management.base import BaseCommand

from modules.addresses.dtos import CreateAddressDTO
from modules.users import cpf as cpf_utils
from modules.users.dtos import CreateUserDTO
from modules.users.views import build_user_service

DEMO_PASSWORD = "Demo#Cadastro2024"

DEMO_USERS = [
    ("Maria", "Oliveira", "maria.oliveira@example.com", "11987654321"),
    ("Carlos", "Pereira", "carlos.pereira@example.com", "21987654321"),
    ("Juliana", "Santos", "juliana.santos@example.com", "31987654321"),
    ("Roberto", "Almeida", "roberto.almeida@example.com", "41987654321"),
    ("Fernanda", "Costa", "fernanda.costa@example.com", "51987654321"),
]

DEMO_ADDRESSES = [
    ("Rua das Flores", "120", "Centro", "São Paulo", "SP", "01001-000"),
    ("Avenida Atlântica", "450", "Copacabana", "Rio de Janeiro", "RJ", "22010-000"),
    ("Rua da Bahia", "1200", "Lourdes", "Belo Horizonte", "MG", "30160-011"),
    ("Rua XV de Novembro", "300", "Centro", "Curitiba", "PR", "80020-310"),
    ("Avenida Borges de Medeiros", "800", "Centro", "Porto Alegre", "RS", "90020-020"),
]


class Command(BaseCommand):
    help = "Seed database with the administrative account and demo users."

    def add_arguments(self, parser):
        parser.add_argument(
            "--admin-only",
            action="store_true",
            help="Only create the administrative account.",
        )

    def handle(self, *args, **options):
        self.stdout.write("Seeding development data...")
        service = build_user_service()

        admin, admin_created = service.ensure_admin()
        self.stdout.write(
            f"Admin {admin.email}: {'created' if admin_created else 'already present'}"
        )
        if options["admin_only"]:
            return

        users_created = self._seed_users(service)
        self.stdout.write(self.style.SUCCESS(f"Seed completed: users={users_created}"))

    def _seed_users(self, service) -> int:
        created = 0
        for (first, last, email, phone), address in zip(DEMO_USERS, DEMO_ADDRESSES):
            if service.email_exists(email):
                continue
            street, number, neighborhood, city, state, zip_code = address
            dto = CreateUserDTO(
                first_name=first,
                last_name=last,
                cpf=cpf_utils.generate(),
                email=email,
                phone=phone,
                password=DEMO_PASSWORD,
                confirm_password=DEMO_PASSWORD,
                addresses=[
                    CreateAddressDTO(
                        street=street,
                        number=number,
                        neighborhood=neighborhood,
                        city=city,
                        state=state,
                        zip_code=zip_code,
                        is_primary=True,
                    )
                ],
            )
            service.create_user(dto)
            created += 1
        return created
