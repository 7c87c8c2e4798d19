# manage.py

# Load .env sebelum settings dibaca
from dotenv import load_dotenv
load_dotenv()

import asyncio
import typer
import uvicorn
from typing_extensions import Annotated

# Typer CLI untuk operasional Shipflow (database, master data, server)
cli = typer.Typer(
    help="Manajemen CLI untuk aplikasi Shipflow."
)

# --- Database Commands ---

@cli.command()
def init_db():
    """
    Inisialisasi database dan membuat semua tabel.
    """
    # Import dependency di dalam fungsi agar tidak dieksekusi saat startup
    from shipflow.database import Base, async_engine
    import shipflow.models  # noqa: F401  registrasi semua tabel ke Base.metadata

    async def create_tables():
        async with async_engine.begin() as conn:
            typer.echo("Membuat semua tabel sesuai models...")
            await conn.run_sync(Base.metadata.create_all)
        await async_engine.dispose()
        typer.secho("✅ Database berhasil diinisialisasi.", fg=typer.colors.GREEN)

    asyncio.run(create_tables())

# --- Directory Commands ---

@cli.command()
def seed_directory(
    carrier_name: Annotated[str, typer.Option(help="Nama carrier demo.")] = "Demo Express",
    drivers: Annotated[int, typer.Option(help="Jumlah driver untuk carrier demo.")] = 2,
    staff_email: Annotated[str, typer.Option(help="Email warehouse staff demo.")] = "warehouse@shipflow.local",
    csr_email: Annotated[str, typer.Option(help="Email CSR demo.")] = "csr@shipflow.local",
):
    """
    Mengisi directory dengan carrier, driver, warehouse staff, dan CSR demo.
    """
    from shipflow.database import AsyncSessionLocal, async_engine
    from shipflow.models import Carrier, Driver, User, UserRole

    async def seed():
        async with AsyncSessionLocal() as session:
            try:
                carrier = Carrier(name=carrier_name)
                session.add(carrier)
                await session.flush()

                for index in range(1, drivers + 1):
                    user = User(
                        email=f"driver{index}@{carrier_name.lower().replace(' ', '-')}.local",
                        first_name="Driver",
                        last_name=str(index),
                        role=UserRole.DRIVER
                    )
                    session.add(user)
                    await session.flush()
                    session.add(Driver(
                        carrier_id=carrier.carrier_id,
                        user_id=user.user_id,
                        name=f"Driver {index}",
                        license_number=f"LIC-{index:04d}"
                    ))

                session.add(User(email=staff_email, first_name="Warehouse", last_name="Staff",
                                 role=UserRole.WAREHOUSE_STAFF))
                session.add(User(email=csr_email, first_name="Customer", last_name="Service",
                                 role=UserRole.CSR))
                await session.commit()
                typer.secho(
                    f"✅ Carrier '{carrier_name}' ({carrier.carrier_id}) dengan {drivers} driver berhasil dibuat.",
                    fg=typer.colors.GREEN
                )
            except Exception as e:
                await session.rollback()
                typer.secho(f"🔥 Gagal seed directory: {e}", fg=typer.colors.RED)
                raise typer.Exit(code=1)
        await async_engine.dispose()

    asyncio.run(seed())

# --- Server Commands ---

@cli.command()
def run(
    host: str = "127.0.0.1",
    port: int = 8000,
    reload: bool = True
):
    """
    Menjalankan development server Uvicorn.
    """
    typer.echo(f"🚀 Menjalankan server di http://{host}:{port}")
    uvicorn.run("main:app", host=host, port=port, reload=reload, factory=True)


if __name__ == "__main__":
    cli()
