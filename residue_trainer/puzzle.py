from residue_trainer.legendre_practice import legendre_practice

legendre_practice()
