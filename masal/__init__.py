# Masal Makinesi - children's story safety and validation pipeline
